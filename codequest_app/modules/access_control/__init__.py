"""Role checks shared by the feature modules."""

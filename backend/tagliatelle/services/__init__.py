"""Services package for the tag query and bulk mutation engine."""

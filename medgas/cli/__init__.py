"""medgas command line interface."""

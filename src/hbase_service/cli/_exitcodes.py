"""Process exit codes for the hbsvc CLI."""

SUCCESS = 0
GENERAL_ERROR = 1
USAGE_ERROR = 2
CONFIG_ERROR = 3
CONNECTION_ERROR = 4
FILTER_ERROR = 5
EXECUTION_FAILURE = 6

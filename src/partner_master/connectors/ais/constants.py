"""Remote data service endpoint paths and response keys."""

TOKEN_PATH = "/v2/tokenrequest"
DEFAULT_CONFIG_PATH = "/v2/defaultconfig"
DATASERVICE_TABLE_PATH = "/v2/dataservice/table/{table}"
JARGON_PATH = "/jargonservice"

# Query string parameters
PARAM_FILTER = "$filter"
PARAM_LIMIT = "$limit"
PARAM_TOKEN = "$token"

# Response structure: {"fs_DATABROWSE_<table>": {"data": {"gridData": {"rowset": [...]}}}}
FORM_KEY_TEMPLATE = "fs_DATABROWSE_{table}"

AUTH_HEADER = "jde-AIS-Auth"

# Environment variables
ENV_BASE_URL = "AIS_BASE_URL"
ENV_USERNAME = "AIS_USERNAME"
ENV_PASSWORD = "AIS_PASSWORD"
ENV_ENVIRONMENT = "AIS_ENVIRONMENT"
ENV_ROLE = "AIS_ROLE"
ENV_VERIFY_SSL = "AIS_VERIFY_SSL"
ENV_TIMEOUT = "AIS_TIMEOUT"

"""Configuration constants and defaults.

Defaults for the persisted CLI config, environment variable names and the
names of the files the CLI reads and writes in the working directory.
"""

# Environment variables
ENV_CONFIG_PATH = "ROWND_CLI_CONFIG"
ENV_API_URL = "ROWND_API_URL"
ENV_ANALYZER_URL = "ROWND_ANALYZER_URL"
ENV_ANALYZER_API_KEY = "ROWND_ANALYZER_API_KEY"
ENV_ANALYZER_API_SECRET = "ROWND_ANALYZER_API_SECRET"
ENV_DEMO_URL = "ROWND_DEMO_URL"
ENV_APP_KEY = "ROWND_APP_KEY"

# Default values
DEFAULT_CONFIG_FILENAME = ".rownd-cli-config.json"
DEFAULT_API_URL = "https://api.rownd.io"
DEFAULT_ANALYZER_URL = "https://rownd-website-analyzer.fly.dev"
DEFAULT_DEMO_URL = "https://rownd-website-demo.fly.dev/create-demo"
DEFAULT_CONSOLE_URL = "https://app.rownd.io"
DEFAULT_REQUEST_TIMEOUT = 30  # seconds, applied to every HTTP call

# Token lifecycle
TOKEN_REFRESH_LEEWAY_SECONDS = 5 * 60
OAUTH_DISCOVERY_PATH = "hub/auth/.well-known/oauth-authorization-server"

# Working-directory files
TOML_FILENAME = "rownd.toml"
ENV_FILENAME = ".env"
APP_CREDENTIALS_FILENAME = ".rownd-credentials.json"

# Keys accepted by `rownd config set`
SETTABLE_KEYS = (
    "api_url",
    "token",
    "refresh_token",
    "selected_account_id",
    "selected_app_id",
    "analyzer_url",
    "analyzer_api_key",
    "analyzer_api_secret",
    "demo_url",
)
SECRET_KEYS = frozenset(
    {"token", "refresh_token", "analyzer_api_key", "analyzer_api_secret"}
)

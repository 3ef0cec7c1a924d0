PRODUCTION = "production"  # user-facing deployment
DEVELOPMENT = "development"  # developer machines and shared dev servers
TESTING = "testing"  # transient environment for a single test run

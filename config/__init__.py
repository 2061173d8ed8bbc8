# config package — authoritative source for all orchestrator configuration.
#
# Sub-modules:
#   api_config.py    — provider endpoints, authentication, model identifiers
#   model_params.py  — capability tags, cost/latency estimates, default
#                      generation parameters, timeouts, system prompts
#
# Credentials are NOT stored here; they are read from the process
# environment by src/model_orchestrator/config.py:load_credentials().

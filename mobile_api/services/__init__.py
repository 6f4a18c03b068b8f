"""
Services

- device - Identity (device.json) and configuration (config.json)
- auth - API key validation
- system - Host metrics
- commands - Factory reset, restart and shutdown scripts
"""

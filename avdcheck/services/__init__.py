"""Azure service wrappers: credentials and resource inventory."""

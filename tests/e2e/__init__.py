"""
End-to-end tests for repopacker.

Golden smoke flows pack synthetic repositories written to disk through the
library API and the CLI and check the complete document.
"""

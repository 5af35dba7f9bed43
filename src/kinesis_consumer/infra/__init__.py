"""Template mutation and packaging helpers for kinesis-consumer."""

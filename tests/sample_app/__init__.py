"""Annotated classes used as generation input by the test suite."""

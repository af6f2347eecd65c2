"""Command line interface for the USSD gateway."""

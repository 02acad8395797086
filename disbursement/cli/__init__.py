"""Command-line tooling for the disbursement ledger (see `disbursement.cli.ledger`)."""

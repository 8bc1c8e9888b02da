"""absint analysis engines: the abstract interpreter and the transfer-table verifier."""

"""Services for accounts, credentials and to-do items."""

"""Authentication: identity provider adapter, sign-in link store, auth actions."""

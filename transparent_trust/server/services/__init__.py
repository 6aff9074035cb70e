"""Request-scoped dependencies shared by the API routers."""

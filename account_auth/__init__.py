"""Account authentication API: registration, bearer sessions, email
verification and password reset."""

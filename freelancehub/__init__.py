"""freelancehub: freelance marketplace backend."""

ROLE_ADMIN = "admin"

ALL_ROLES = [ROLE_ADMIN]

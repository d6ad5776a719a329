from typing import Literal

# Flat, global roles. There is no hierarchy: privileged actions compare
# against "Admin" directly.
Role = Literal["Admin", "Team Lead", "Member"]
ROLES: tuple[Role, ...] = ("Admin", "Team Lead", "Member")

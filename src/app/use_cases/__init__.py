"""
Use cases, organized by domain folder:
- access/: Request authentication and the admin gate
- auth/: Registration, login, two-factor and password flows
- users/: Profile and administrative lifecycle
- pending/: Staged registrations
- sessions/: Administrator sessions
- audit/: Security log queries

Import from the subpackages.
"""

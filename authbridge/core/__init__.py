"""Core authentication model, independent of any client.

Module Structure:
    - exceptions.py   : AuthError taxonomy
    - validators.py   : Blank checks and configuration assertions
    - lifecycle.py    : Thread-safe one-time initialization
    - context.py      : WebContext capability + Flask binding
    - credentials.py  : Credentials read from callback requests
    - converters.py   : Typed attribute values and attribute schemas
    - profile.py      : User profiles, typed ids, rebuild from session
    - ticket_store.py : CAS proxy granting ticket store + periodic cleaner

Usage Pattern:
    Import explicitly when needed:
        from authbridge.core.profile import build_profile
        from authbridge.core.ticket_store import ProxyGrantingTicketStore
"""

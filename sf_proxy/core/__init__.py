"""Core Salesforce proxy logic, independent of the HTTP framework.

Module Structure:
    - pkce.py                 : PKCE verifier/challenge generation
    - token_store.py          : Process-wide credential holder
    - authorization_state.py  : state nonce -> PKCE verifier for in-flight logins
    - validators.py           : Record id / sObject name validation
    - salesforce/             : OAuth client, REST API proxy, exceptions

Import explicitly when needed:
    from sf_proxy.core.pkce import generate_pkce_pair
    from sf_proxy.core.token_store import Credential, TokenStore
    from sf_proxy.core.salesforce import SalesforceApiProxy
"""

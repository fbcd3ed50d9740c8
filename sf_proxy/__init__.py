"""Salesforce OAuth proxy Flask application package.

To create the Flask app:
    from sf_proxy.flask_app import create_app

To use the Salesforce client library without Flask:
    from sf_proxy.core.salesforce import SalesforceOAuthClient, SalesforceApiProxy
"""
# flask_app is imported explicitly; importing sf_proxy never loads settings

"""
API Routers - Endpoint handlers for the Form Relay API.

- submissions: Receive form submissions and create CRM items
"""

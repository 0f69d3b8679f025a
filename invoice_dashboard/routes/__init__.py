"""
FastAPI routers for all endpoints.

- auth: login / logout form actions
- invoices: invoice form actions and the reads behind the invoice pages
- health: public liveness probe
"""

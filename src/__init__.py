"""
Comex Credit Service - Trade-Finance Credit Allocation & Approval

A FastAPI-based microservice that runs the credit application approval
workflow, the credit ledger that imports draw down, and the payment
schedules that follow from each import's financial breakdown.
"""

__version__ = "0.1.0"

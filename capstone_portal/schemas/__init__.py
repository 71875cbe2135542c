"""
Schemas module - store records and request/response schemas.

Records (UserProfile, Application) mirror MongoDB documents;
request/response schemas are the API contract.
"""

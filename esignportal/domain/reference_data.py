"""Deterministic seed data served by the in-memory transport.

The three accounts and three requests match the demo data the portal has
always shipped with, so local runs and tests share the same fixtures.
"""

from __future__ import annotations

from typing import Any

DEFAULT_PASSWORD = "password123"

SEED_USERS: list[dict[str, Any]] = [
    {
        "id": "1",
        "email": "employee@company.com",
        "role": "employee",
        "name": "John Doe",
        "phone": "+1234567890",
        "address": "123 Main St, City, State",
        "hasCompletedFirstLogin": True,
        "createdAt": "2024-01-01T09:00:00Z",
        "updatedAt": "2024-01-01T09:00:00Z",
    },
    {
        "id": "2",
        "email": "hr@company.com",
        "role": "hr",
        "name": "Jane Smith",
        "phone": "+1987654321",
        "address": "456 Admin Ave, City, State",
        "hasCompletedFirstLogin": True,
        "createdAt": "2024-01-01T09:00:00Z",
        "updatedAt": "2024-01-01T09:00:00Z",
    },
    {
        "id": "3",
        "email": "newuser@company.com",
        "role": "employee",
        "name": "New Employee",
        "hasCompletedFirstLogin": False,
        "createdAt": "2024-01-18T09:00:00Z",
        "updatedAt": "2024-01-18T09:00:00Z",
    },
]

# Login passwords per seeded email; hashed by the mock transport on startup.
SEED_PASSWORDS: dict[str, str] = {user["email"]: DEFAULT_PASSWORD for user in SEED_USERS}

SEED_REQUESTS: list[dict[str, Any]] = [
    {
        "id": "1",
        "title": "Employment Contract",
        "description": "Please review and sign your employment contract",
        "status": "pending",
        "createdAt": "2024-01-15T10:00:00Z",
        "updatedAt": "2024-01-15T10:00:00Z",
        "employeeId": "1",
        "employeeName": "John Doe",
        "employeeEmail": "employee@company.com",
        "createdBy": "2",
        "expiresAt": "2099-01-15T10:00:00Z",
        "documents": [
            {
                "id": "1",
                "name": "employment-contract.pdf",
                "url": "mock-url-1",
                "type": "application/pdf",
                "size": 1024000,
                "uploadedAt": "2024-01-15T10:00:00Z",
            }
        ],
    },
    {
        "id": "2",
        "title": "NDA Agreement",
        "description": "Non-disclosure agreement for sensitive information",
        "status": "signed",
        "createdAt": "2024-01-10T14:30:00Z",
        "updatedAt": "2024-01-12T09:15:00Z",
        "employeeId": "1",
        "employeeName": "John Doe",
        "employeeEmail": "employee@company.com",
        "createdBy": "2",
        "expiresAt": "2024-02-10T14:30:00Z",
        "signedAt": "2024-01-12T09:15:00Z",
        "documents": [
            {
                "id": "2",
                "name": "nda-agreement.pdf",
                "url": "mock-url-2",
                "type": "application/pdf",
                "size": 512000,
                "uploadedAt": "2024-01-10T14:30:00Z",
            }
        ],
    },
    {
        "id": "3",
        "title": "Employee Handbook Acknowledgment",
        "description": (
            "Please acknowledge that you have received and will comply with the "
            "employee handbook"
        ),
        "status": "pending",
        "createdAt": "2024-01-20T11:00:00Z",
        "updatedAt": "2024-01-20T11:00:00Z",
        "employeeId": "3",
        "employeeName": "New Employee",
        "employeeEmail": "newuser@company.com",
        "createdBy": "2",
        "expiresAt": "2099-01-20T11:00:00Z",
        "documents": [
            {
                "id": "3",
                "name": "employee-handbook.pdf",
                "url": "mock-url-3",
                "type": "application/pdf",
                "size": 2048000,
                "uploadedAt": "2024-01-20T11:00:00Z",
            }
        ],
    },
]

RESET_PASSWORD_MESSAGE = "Password reset instructions sent to your email."

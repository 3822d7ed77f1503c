"""Document collection names (schema-in-code).

Firestore has no DDL or migrations; collections appear on first write. These
constants are the single source of truth for collection names and are used
by both the Firestore and the in-memory backend.

Queries that filter and order on different fields need composite indexes in
Firestore:
    tasks:          status ASC, createdAt DESC
    notifications:  recipientId ASC, createdAt DESC
                    recipientId ASC, read ASC, createdAt DESC
    users:          role ASC, active ASC
"""

COLLECTION_TASKS = "tasks"
COLLECTION_NOTIFICATIONS = "notifications"
COLLECTION_USERS = "users"

"""Audit storage constants (column lengths of the persisted audit record)."""

AUDIT_ID_LENGTH = 50
AUDIT_TYPE_LENGTH = 10
AUDIT_OBJECT_ID_LENGTH = 255
AUDIT_DISCRIMINATOR_LENGTH = 255
AUDIT_TRANSACTION_HASH_LENGTH = 40
AUDIT_BLAME_ID_LENGTH = 255
AUDIT_BLAME_USER_LENGTH = 255
AUDIT_BLAME_USER_FQDN_LENGTH = 255
AUDIT_BLAME_USER_FIREWALL_LENGTH = 100
AUDIT_IP_LENGTH = 45

# Columns with a secondary index on every audit table
AUDIT_INDEXED_COLUMNS = (
    "type",
    "object_id",
    "discriminator",
    "transaction_hash",
    "blame_id",
    "created_at",
)

# session.info key holding the transaction collected in before_flush
SESSION_INFO_KEY = "flushaudit.transaction"

"""Cache keys shared by handlers and invalidation signals."""

SESSION_TYPES_LIST = "scheduling:session_types"

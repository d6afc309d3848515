"""memopad: memo storage and search backend."""

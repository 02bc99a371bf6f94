"""Self-contained helpers for quantities, caching, labels, hashing, text, time and data conversion."""
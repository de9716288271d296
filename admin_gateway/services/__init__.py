"""Service Layer — orchestrates core logic around infrastructure IO."""

"""Infrastructure layer: persistence adapters and other IO."""

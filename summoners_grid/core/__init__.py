"""Engine-agnostic building blocks: data types, configuration and events."""

"""External service integrations: durable storage and cloud backup."""

"""Client-side chat session core for a lead-capture conversational webhook."""

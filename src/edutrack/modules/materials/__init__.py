"""Materials module - school supply catalogue and parent carts."""

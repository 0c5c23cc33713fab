"""HTTP surface of the contact relay."""

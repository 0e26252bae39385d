"""Built-in plugins shipped with formgate."""

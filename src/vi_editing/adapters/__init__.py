"""Host adapters that attach editing sessions to UI toolkits."""

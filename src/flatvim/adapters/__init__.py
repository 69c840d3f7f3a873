"""Host adapters embedding flatvim sessions in UI toolkits."""

"""Import uploaded-files archives into a project's upload directory."""

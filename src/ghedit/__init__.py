"""Edit GitHub issues as plain text through the gh CLI."""

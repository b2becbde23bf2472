"""taskblocks - categorized task lists with due dates."""

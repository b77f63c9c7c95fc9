"""Authentication and the student/administrator access gate."""

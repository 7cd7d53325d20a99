"""Django app for managing Redis ACL users."""

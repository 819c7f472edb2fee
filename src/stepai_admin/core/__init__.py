"""Core services: exceptions, logging, admin session and login flow."""

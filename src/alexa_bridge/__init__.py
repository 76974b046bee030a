"""Alexa Skills Kit to automation webhook bridge."""

"""Moteur de réservation de tournées / Tour booking engine for bulk-material dispatch."""

"""
Test suite for Neuroevolution Racer.

This package contains unit tests organized by component:
- test_params.py: Tests for parameter dataclasses
- test_geometry.py: Tests for vector and segment geometry
- test_network.py: Tests for the neural network and its records
- test_sensors.py: Tests for ray-cast sensors
- test_dynamics.py: Tests for car kinematics
- test_contact.py: Tests for wall collision and checkpoint contact
- test_genetics.py: Tests for the genetic algorithm
- test_engine.py: Tests for the generation lifecycle engine
- test_analysis.py: Tests for generation history analysis
- test_tracks.py: Tests for the built-in oval track
- test_integration.py: Integration tests for full training runs
"""

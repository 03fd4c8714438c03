"""Ports - interfaces between the QAT plugin and the outside world."""

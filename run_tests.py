#!/usr/bin/env python
"""
Run the test suite with Django's test runner
Usage: python run_tests.py [app ...]
"""
import os
import sys
import django
from django.conf import settings
from django.test.utils import get_runner

DEFAULT_LABELS = [
    'pgmanager.core',
    'pgmanager.properties',
    'pgmanager.tenants',
    'pgmanager.payments',
    'pgmanager.documents',
    'pgmanager.dashboard',
    'pgmanager.preferences',
    'pgmanager.adminpanel',
    'pgmanager.realtime',
    'pgmanager.client',
]

if __name__ == "__main__":
    os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'pgmanager.config.settings')
    django.setup()
    TestRunner = get_runner(settings)
    test_runner = TestRunner()
    labels = [f'pgmanager.{label}' if '.' not in label else label for label in sys.argv[1:]]
    failures = test_runner.run_tests(labels or DEFAULT_LABELS)
    sys.exit(bool(failures))

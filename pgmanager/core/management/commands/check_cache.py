"""
Django management command to check the cache configuration.

Usage:
    python manage.py check_cache
"""
from django.conf import settings
from django.core.cache import cache
from django.core.management.base import BaseCommand
from pgmanager.core.cache_utils import make_cache_key, get_owner_cache_version


class Command(BaseCommand):
    help = 'Check cache configuration and verify it is working'

    def handle(self, *args, **options):
        backend = settings.CACHES['default']['BACKEND']
        self.stdout.write("=" * 60)
        self.stdout.write(self.style.SUCCESS("Cache Configuration Check"))
        self.stdout.write("=" * 60)
        self.stdout.write(f"\n1. Cache Backend: {backend}")
        self.stdout.write(f"2. Cache Location: {settings.CACHES['default'].get('LOCATION', 'N/A')}")

        self.stdout.write("\n3. Testing Cache Operations:")
        self.stdout.write("-" * 60)
        test_key = make_cache_key('check_cache', 'roundtrip')
        try:
            cache.set(test_key, 'ok', 60)
            value = cache.get(test_key)
            if value == 'ok':
                self.stdout.write(self.style.SUCCESS("✅ Cache SET/GET: Success (value matches)"))
            else:
                self.stdout.write(self.style.ERROR(f"❌ Cache GET: Failed (got: {value})"))

            cache.delete(test_key)
            if cache.get(test_key) is None:
                self.stdout.write(self.style.SUCCESS("✅ Cache DELETE: Success"))
            else:
                self.stdout.write(self.style.ERROR("❌ Cache DELETE: Failed"))

            self.stdout.write(f"\n4. Owner cache generation (owner 0): {get_owner_cache_version(0)}")

            if 'django_redis' in backend:
                from django_redis import get_redis_connection

                self.stdout.write("\n5. Redis PING:")
                if get_redis_connection('default').ping():
                    self.stdout.write(self.style.SUCCESS("✅ Redis responded to PING"))

            self.stdout.write("\n" + "=" * 60)
            self.stdout.write(self.style.SUCCESS("✅ Cache is working"))
            self.stdout.write("=" * 60)
        except Exception as e:
            self.stdout.write("\n" + "=" * 60)
            self.stdout.write(self.style.ERROR(f"❌ ERROR: {str(e)}"))
            self.stdout.write("=" * 60)
            self.stdout.write(self.style.WARNING("\nTroubleshooting:"))
            self.stdout.write("   1. Check REDIS_URL in .env file")
            self.stdout.write("   2. Verify django-redis is installed: pip install django-redis")
            self.stdout.write("   3. Verify the Redis service is reachable from this host")
            raise

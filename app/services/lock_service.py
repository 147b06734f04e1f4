import redis

from app.utils.logging import get_logger
from app.utils.retry import redis_retry
from app.utils.settings import REDIS_URL

logger = get_logger(__name__)

#LUA porownaj i usun, atomicity
_RELEASE_LUA = """
if redis.call('GET', KEYS[1]) == ARGV[1] then
    return redis.call('DEL', KEYS[1])
else
    return 0
end
"""

#redis wykonuje atomowo przez lua, skrypt dziala jako jedna nieprzerywalna operacja
#nie mozna wcisnac sie miedzy GET a DEL, wiec get + porownanie + del wszystko naraz


class LockService:
    """
    -single flight dla okresowego sweepa (dwa workery beat nie robia tego samego naraz)
    -zwalnianie locka tylko przez wlasciciela
    -atomowosc przy pomocy lua
    """

    def __init__(self, url: str | None = None, client: redis.Redis | None = None):
        self.redis = client or redis.Redis.from_url(
            url or REDIS_URL,
            decode_responses=True,
        )

    @staticmethod
    def _key(name: str) -> str:
        return f"lock:{name}"

    @redis_retry()
    def acquire(self, name: str, owner: str, ttl: int) -> bool:
        key = self._key(name)
        logger.info(f"Acquire lock {key} for {owner}")
        #SET lock:cart-sweep "<owner>" NX EX 600
        return bool(
            self.redis.set(
                name=key,
                value=owner,
                nx=True, #not eXists, jak klucz jest to nic nie rob i None
                ex=ttl, #wygasa sam gdyby worker padl w trakcie
            )
        )

    @redis_retry()
    def release(self, name: str, owner: str) -> bool:
        key = self._key(name)
        logger.info(f"Release lock {key} for {owner}")
        res = self.redis.eval(_RELEASE_LUA, 1, key, owner)
        return bool(res)

import pytest

from strata import Layer, OperationRegistry
from strata.registry import discover_operations


class Cache(Layer):
    name = "cache"

    async def get(self, key):
        yield

    async def put(self, key, value):
        return None

    def helper(self):
        return "not an operation"

    async def _private(self):
        return None


class Store(Layer):
    name = "store"

    async def delete(self, key):
        return True

    async def get(self, key):
        return "v"


class TestDiscoverOperations:
    def test_public_async_methods_in_definition_order(self):
        assert list(discover_operations(Cache())) == ["get", "put"]

    def test_sync_and_private_methods_are_ignored(self):
        ops = discover_operations(Cache())
        assert "helper" not in ops
        assert "_private" not in ops

    def test_factories_are_bound(self):
        cache = Cache()
        assert discover_operations(cache)["get"].__self__ is cache

    def test_instance_attributes_come_first(self):
        async def ping():
            return "pong"

        cache = Cache()
        cache.ping = ping
        assert list(discover_operations(cache)) == ["ping", "get", "put"]

    def test_subclass_overrides_keep_single_entry(self):
        class Sub(Cache):
            async def put(self, key, value):
                return True

            async def extra(self):
                return None

        assert list(discover_operations(Sub())) == ["put", "extra", "get"]

    def test_mapping_layer(self):
        async def get(key):
            return key

        layer = {"get": get, "version": 3, 7: get}
        assert discover_operations(layer) == {"get": get}


class TestOperationRegistry:
    def test_names_union_in_first_seen_order(self):
        registry = OperationRegistry([Cache(), Store()])
        assert registry.names == ("get", "put", "delete")
        assert list(registry) == ["get", "put", "delete"]
        assert len(registry) == 3

    def test_sublists_keep_layer_order(self):
        cache, store = Cache(), Store()
        registry = OperationRegistry([cache, store])
        assert registry.layers_for("get") == (cache, store)
        assert registry.layers_for("put") == (cache,)
        assert registry.layers_for("delete") == (store,)

    def test_entries_pair_layers_with_factories(self):
        store = Store()
        ((layer, factory),) = OperationRegistry([store]).entries("delete")
        assert layer is store
        assert factory.__func__ is Store.delete

    def test_construction_never_invokes_handlers(self):
        calls = []

        class Spy(Layer):
            async def get(self):
                calls.append("get")
                return 1

        OperationRegistry([Spy()])
        assert calls == []

    def test_is_read_only(self):
        registry = OperationRegistry([Cache()])
        assert "get" in registry
        assert "missing" not in registry
        with pytest.raises(TypeError):
            registry._entries["new"] = ()
        with pytest.raises(KeyError):
            registry.entries("missing")

    def test_empty_layer_list(self):
        registry = OperationRegistry([])
        assert registry.names == ()
        assert registry.layers == ()

"""Built-in processor plugins.

Processors are accessed via PluginManager, not direct imports:
    manager = PluginManager()
    manager.register_builtin_plugins()
    counter_cls = manager.get_processor_by_name("repeat_counter")
"""

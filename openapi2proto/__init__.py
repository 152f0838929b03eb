import importlib

mod = "openapi2proto"
class LazyLoader:
    """    
    Lazy loader for the openapi2proto functions to speed up startup time.    
    """
    def __init__(self, mappings):
        self._modules = {}
        self._mappings = mappings

    def _load_module(self, module_name):
        if module_name not in self._modules:
            self._modules[module_name] = importlib.import_module(module_name)
        return self._modules[module_name]

    def __getattr__(self, item):
        if item.startswith("__"):
            raise AttributeError(item)
        if item in self._mappings:
            module_name, func_name = self._mappings[item]
            module = self._load_module(module_name)
            return getattr(module, func_name)
        else:
            return self._load_module(f"{mod}.{item}")

# Define the functions and their corresponding module paths
_mappings = {
    "generate_proto": (f"{mod}.openapitoproto", "generate_proto"),
    "convert_openapi_to_proto": (f"{mod}.openapitoproto", "convert_openapi_to_proto"),
    "OpenApiToProto": (f"{mod}.openapitoproto", "OpenApiToProto"),
    "resolve_ref_type": (f"{mod}.refresolver", "resolve_ref_type"),
    "path_method_to_name": (f"{mod}.naming", "path_method_to_name"),
    "to_enum": (f"{mod}.naming", "to_enum"),
    "APIDefinition": (f"{mod}.swagger", "APIDefinition"),
    "DocumentLoader": (f"{mod}.loader", "DocumentLoader"),
}

_lazy_loader = LazyLoader(_mappings)

def __getattr__(name):
    return getattr(_lazy_loader, name)

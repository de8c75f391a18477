class SetOnce[T]:
    """An attribute that can be assigned once and never rebound."""

    def __set_name__(self, owner, name: str) -> None:
        self._name = name
        self._storage_name = f'_SetOnce_{self._name}'

    def __get__(self, instance, owner=None) -> T:
        if instance is None:
            return self  # type: ignore
        return getattr(instance, self._storage_name)

    def __set__(self, instance, value: T) -> None:
        if self.is_set(instance):
            raise AttributeError(
                f'Attribute "{self._name}" cannot be set more than once'
            )
        setattr(instance, self._storage_name, value)

    def is_set(self, instance) -> bool:
        return hasattr(instance, self._storage_name)

"""Binding — resolve named path parameters into domain values.

Resolvers are registered per name in a ``BindingRegistry``. For each
request the ``Dispatcher`` resolves the route's bound parameters in path
order, collects them in a ``RequestContext``, and hands control either to
the route handler or to the error channel.
"""

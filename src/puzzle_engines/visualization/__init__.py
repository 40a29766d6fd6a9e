"""pygame renderers and keyboard/mouse play loops for the engines."""

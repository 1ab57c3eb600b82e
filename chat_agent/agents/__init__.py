"""
Agents - orchestrator (tool-calling loop), RAG (document Q&A), turn coordinator

Import from the subpackages directly: chat_agent.agents.orchestrator,
chat_agent.agents.rag, chat_agent.agents.turn.
"""

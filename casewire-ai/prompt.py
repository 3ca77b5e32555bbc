"""
Prompt templates and the typed records they are rendered from.

All prompts are in Portuguese: the model writes to Brazilian clients and
reads Brazilian court documents.
"""
from dataclasses import dataclass, field

PETITION_MAX_CHARS = 10_000
CONTRACT_MAX_CHARS = 5_000
DOCUMENT_MAX_CHARS = 15_000

NOT_AVAILABLE = "N/A"

SENDER_LABELS = {
    "client": "Cliente",
    "operator": "Operador",
}

DEFAULT_COMPANY_CONTEXT = (
    "Somos uma empresa parceira do escritório responsável. Atuamos no acompanhamento "
    "processual e na comunicação operacional com clientes, sem substituir o advogado."
)

RULES = """REGRAS (obrigatórias em qualquer mensagem):
- Nunca se apresente como advogado nem afirme representar o cliente judicialmente.
- Nunca prometa resultados judiciais.
- Seja transparente sobre o papel da empresa: parceira do escritório, responsável pela comunicação.
- Nunca revele o critério interno usado para definir valores liberados; informe apenas o valor."""

CASE_TEMPLATE = """DADOS DO CASO:
Caso: {title}
Réu: {defendant}
Tipo: {case_type}
Tribunal: {court}
Número do processo: {process_number}
Escritório parceiro: {partner_firm}
Advogado parceiro: {partner_lawyer}"""

DISCLOSURE_PLAYBOOK = """ROTEIRO DE CONDUÇÃO (siga as etapas em ordem, sem pular):
1. Confirme a identidade do cliente antes de qualquer detalhe do processo.
2. Indique que há novidades no processo, sem entrar em valores.
3. Revele o valor somente depois que o cliente demonstrar interesse.
4. Com o interesse confirmado, solicite os dados bancários para o repasse.
5. Mencione o contato de validação (escritório/advogado parceiro) somente depois que os dados bancários forem informados."""

HISTORY_TEMPLATE = """EXEMPLOS DE CONVERSAS ANTERIORES DO MESMO OPERADOR (outros casos):
{history}

Use estas conversas apenas como referência de estilo: imite o tom, o tamanho das mensagens e a forma de conduzir.
- Nunca repita uma mensagem que já foi enviada.
- Responda às perguntas que o cliente deixou em aberto.
- Não peça novamente informações que o cliente já forneceu."""

SUGGEST_REPLY_SYSTEM = """Você é um assistente de comunicação processual para uma empresa que acompanha processos judiciais e se comunica com clientes via WhatsApp, em parceria com escritórios de advocacia.

Contexto da empresa: {company_context}

{playbook}

{case_context}

{rules}
- Adapte a linguagem ao nível de compreensão do cliente.
{time_policy}{history_block}

Analise a conversa e classifique o estado emocional do cliente em um destes valores: desconfiado, curioso, resistente, ansioso, interessado.
Sugira 2 respostas: uma curta e uma padrão.

Responda APENAS com JSON válido:
{{"state": "...", "short": "resposta curta", "standard": "resposta padrão completa"}}"""

SUGGEST_REPLY_USER = """Conversa atual:
{transcript}

Sugira a próxima resposta do operador, seguindo o estilo aprendido e a etapa atual do roteiro."""

GENERATE_SYSTEM = """Você é um assistente de comunicação processual.

Contexto da empresa: {company_context}

Contexto: {context}
Objetivo: {objective}
Tom: {tone}
Formalidade: {formality}

{case_context}

{rules}
- Mencione o escritório parceiro quando relevante.{modifier}
{time_policy}

Gere {count} mensagem(ns). Para cada uma, avalie:
- confidence: nota inteira de 0 a 10
- scam_risk: low, medium ou high
- scam_reasons: lista de motivos do risco

Responda APENAS com JSON válido:
{{"messages": [{{"message": "...", "short_variant": "versão curta", "confidence": N, "scam_risk": "...", "scam_reasons": ["..."]}}]}}"""

ACTION_MODIFIERS = {
    "make_trustworthy": "Foque em tornar a mensagem mais confiável, incluindo referências ao escritório parceiro e ao processo.",
    "reduce_scam": (
        "Reduza elementos que possam parecer golpe. Evite linguagem de urgência, valores específicos "
        "prematuros e links. Inclua formas de verificação."
    ),
    "simplify": "Simplifique ao máximo a linguagem. Use frases curtas e simples, evite jargão jurídico.",
}

APPROACH_USER = "Gere uma mensagem de abordagem inicial para o primeiro contato com o cliente sobre este processo."
VARIATIONS_USER = "Gere 3 variações diferentes de mensagem para este caso."
IMPROVE_USER = """Reescreva/melhore esta mensagem existente:
{existing}"""
IMPROVE_EMPTY = "Gere uma mensagem nova."

EXTRACTION_FIELDS = """{{
  "client_name": "Nome",
  "client_cpf": "CPF",
  "defendant": "Réu",
  "case_type": "Ação",
  "court": "Vara",
  "process_number": "Processo",
  "distribution_date": "YYYY-MM-DD",
  "case_value": 0.00,
  "lawyers": [{{"name": "...", "oab": "...", "role": "..."}}],
  "partner_law_firm": "Escritório",
  "phone_contract": "Apenas dígitos do telefone encontrado",
  "summary": "Resumo equilibrado"{extra}
}}"""

PHONE_GUIDELINES = """DIRETRIZES DE EXTRAÇÃO DE TELEFONE (ALTA PRIORIDADE):
- O campo "phone_contract" deve conter o telefone de contato direto do CLIENTE.
- Procure por rótulos como "Celular:", "Fone:", "Telefone:", "Tel:", "WhatsApp:", "Contato:".
- NO CONTRATO (CCB): geralmente no bloco de identificação do emitente/devedor, perto do e-mail e do endereço.
- NA PETIÇÃO: geralmente no parágrafo de qualificação do autor, no início do documento.
- Ignore telefones associados apenas a advogados (perto de OAB)."""

SUMMARY_GUIDELINES = """RESUMO EXECUTIVO:
- 2 a 3 frases concisas.
- Identifique autor, réu, objetivo da ação e motivo principal.
- Evite CPFs, jurisprudência e detalhes técnicos desnecessários."""

OMNI_HINT = """
CONTRATO OMNI: contratos da Omni Financeira trazem os dados do cliente no quadro "Emitente"; o valor financiado aparece no quadro de condições da operação."""

PETITION_SYSTEM = """Você é um assistente jurídico especializado em análise de documentos brasileiros de financiamento (CCB) e petições iniciais.

TAREFA: Extraia dados estruturados combinando as informações da PETIÇÃO e do CONTRATO.
{omni_hint}
{phone_guidelines}

{summary_guidelines}

Responda APENAS com JSON válido:
{fields}"""

PETITION_USER = """Telefone fornecido pelo operador: {phone}

TEXTO DA PETIÇÃO:
{petition}

TEXTO DO CONTRATO/CCB:
{contract}"""

DOCUMENT_SYSTEM = """Você é um assistente jurídico especializado em documentos processuais brasileiros.

TAREFA: Extraia dados estruturados do documento do caso e produza um resumo executivo.

{phone_guidelines}

{summary_guidelines}

Avalie também a confiabilidade do documento:
- confidence: nota inteira de 0 a 10 para a qualidade da extração
- scam_risk: low, medium ou high, se o documento apresentar sinais de fraude ou inconsistência
- rationale: justificativa curta para a nota e o risco

Responda APENAS com JSON válido:
{fields}"""

DOCUMENT_USER = """TEXTO DO DOCUMENTO:
{document}"""

NOT_PROVIDED = "Não fornecido"


def truncate(text: str | None, limit: int) -> str:
    """Cut text to at most `limit` characters."""
    if not text:
        return ""
    return text[:limit]


def _value(value, default: str = NOT_AVAILABLE) -> str:
    if value is None:
        return default
    text = str(value).strip()
    return text or default


def _as_list(value) -> list:
    """JSON arrays only; anything else in a list field counts as absent."""
    return value if isinstance(value, list) else []


@dataclass(frozen=True)
class CaseContext:
    title: str | None = None
    defendant: str | None = None
    case_type: str | None = None
    court: str | None = None
    process_number: str | None = None
    partner_firm: str | None = None
    partner_lawyer: str | None = None

    def render(self) -> str:
        return CASE_TEMPLATE.format(
            title=_value(self.title),
            defendant=_value(self.defendant),
            case_type=_value(self.case_type),
            court=_value(self.court),
            process_number=_value(self.process_number),
            partner_firm=_value(self.partner_firm),
            partner_lawyer=_value(self.partner_lawyer),
        )


@dataclass(frozen=True)
class ChatMessage:
    sender: str
    text: str

    def render(self) -> str:
        return f"{SENDER_LABELS.get(self.sender, self.sender)}: {self.text}"


@dataclass(frozen=True)
class MessageRequest:
    action: str
    case: CaseContext
    case_id: str | None = None
    distribution_date: str | None = None
    case_value: float | None = None
    company_context: str | None = None
    context: str | None = None
    objective: str | None = None
    tone: str | None = None
    formality: str | None = None
    existing_outputs: list = field(default_factory=list)
    recent_messages: list = field(default_factory=list)
    user_id: str | None = None

    @classmethod
    def from_body(cls, body: dict) -> "MessageRequest":
        """Build a request from the camelCase JSON body of the message endpoint."""
        recent = [
            ChatMessage(sender=str(m.get("sender", "")), text=str(m.get("text", "")))
            for m in _as_list(body.get("recentMessages"))
            if isinstance(m, dict)
        ]
        existing = [str(o) for o in _as_list(body.get("existingOutputs")) if o]
        return cls(
            action=str(body.get("action") or ""),
            case=CaseContext(
                title=body.get("caseTitle"),
                defendant=body.get("defendant"),
                case_type=body.get("caseType"),
                court=body.get("court"),
                process_number=body.get("processNumber"),
                partner_firm=body.get("partnerFirm"),
                partner_lawyer=body.get("partnerLawyer"),
            ),
            case_id=body.get("caseId"),
            distribution_date=body.get("distributionDate"),
            case_value=body.get("caseValue"),
            company_context=body.get("companyContext"),
            context=body.get("context"),
            objective=body.get("objective"),
            tone=body.get("tone"),
            formality=body.get("formality"),
            existing_outputs=existing,
            recent_messages=recent,
            user_id=body.get("userId"),
        )


def render_transcript(messages) -> str:
    return "\n".join(m.render() for m in messages)


def _section(text: str) -> str:
    return f"\n{text}" if text else ""


def build_suggest_reply(request: MessageRequest, time_policy: str, history: str) -> tuple[str, str]:
    """Prompt pair for the next operator reply in an ongoing conversation."""
    history_block = ""
    if history.strip():
        history_block = "\n\n" + HISTORY_TEMPLATE.format(history=history.strip())

    system = SUGGEST_REPLY_SYSTEM.format(
        company_context=_value(request.company_context, DEFAULT_COMPANY_CONTEXT),
        playbook=DISCLOSURE_PLAYBOOK,
        case_context=request.case.render(),
        rules=RULES,
        time_policy=time_policy,
        history_block=history_block,
    )
    user = SUGGEST_REPLY_USER.format(
        transcript=render_transcript(request.recent_messages) or "(sem mensagens)",
    )
    return system, user


def build_generate(request: MessageRequest, time_policy: str, count: int) -> tuple[str, str]:
    """Prompt pair for approach, variation and rewrite actions."""
    modifier = ACTION_MODIFIERS.get(request.action, "")
    system = GENERATE_SYSTEM.format(
        company_context=_value(request.company_context, DEFAULT_COMPANY_CONTEXT),
        context=_value(request.context),
        objective=_value(request.objective),
        tone=_value(request.tone, "profissional"),
        formality=_value(request.formality, "média"),
        case_context=request.case.render(),
        rules=RULES,
        modifier=_section(modifier),
        time_policy=time_policy,
        count=count,
    )

    if request.action == "approach_v1":
        user = APPROACH_USER
    elif request.action == "variations_v1":
        user = VARIATIONS_USER
    else:
        existing = request.existing_outputs[0] if request.existing_outputs else IMPROVE_EMPTY
        user = IMPROVE_USER.format(existing=existing)
    return system, user


def build_petition_analysis(
    petition_text: str | None,
    contract_text: str | None,
    contract_type: str | None = None,
    phone_provided: str | None = None,
) -> tuple[str, str]:
    """Prompt pair extracting case data from a petition and its financing contract."""
    system = PETITION_SYSTEM.format(
        omni_hint=OMNI_HINT if contract_type == "omni" else "",
        phone_guidelines=PHONE_GUIDELINES,
        summary_guidelines=SUMMARY_GUIDELINES,
        fields=EXTRACTION_FIELDS.format(extra=""),
    )
    user = PETITION_USER.format(
        phone=_value(phone_provided, "não informado"),
        petition=truncate(petition_text, PETITION_MAX_CHARS) or NOT_PROVIDED,
        contract=truncate(contract_text, CONTRACT_MAX_CHARS) or NOT_PROVIDED,
    )
    return system, user


def build_document_analysis(document_text: str) -> tuple[str, str]:
    """Prompt pair summarizing a stored case document."""
    extra = ',\n  "confidence": 0,\n  "scam_risk": "low",\n  "rationale": "Justificativa"'
    system = DOCUMENT_SYSTEM.format(
        phone_guidelines=PHONE_GUIDELINES,
        summary_guidelines=SUMMARY_GUIDELINES,
        fields=EXTRACTION_FIELDS.format(extra=extra),
    )
    user = DOCUMENT_USER.format(document=truncate(document_text, DOCUMENT_MAX_CHARS))
    return system, user

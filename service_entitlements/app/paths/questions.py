"""
Quiz question metadata.

The decision graph is drawn from this list; path assignment only needs the
question ids referenced by the rule table.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Sequence, Tuple


class StepType(str, Enum):
    SINGLE = "single"
    MULTIPLE = "multiple"
    TEXT = "text"
    SCALE = "scale"


@dataclass(frozen=True)
class QuizOption:
    value: str
    label: str


@dataclass(frozen=True)
class QuizStep:
    id: str
    section: str
    question: str
    type: StepType = StepType.SINGLE
    description: Optional[str] = None
    options: Tuple[QuizOption, ...] = field(default_factory=tuple)

    def option_values(self) -> Tuple[str, ...]:
        return tuple(option.value for option in self.options)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "section": self.section,
            "question": self.question,
            "type": self.type.value,
            "description": self.description,
            "options": [{"value": o.value, "label": o.label} for o in self.options],
        }


# Questions whose answers feed a path predicate directly
DECISIVE_QUESTIONS: Tuple[str, ...] = (
    "experience-level",
    "time-available",
    "income-type",
    "interest-services",
    "interest-content",
    "interest-products",
    "interest-freelance",
)

# Questions that shape the offer framing but never the path
ADJUSTER_QUESTIONS: Tuple[str, ...] = (
    "main-goal",
    "time-horizon",
    "seriousness",
    "technical-level",
    "readiness",
)


def _step(
    step_id: str,
    section: str,
    question: str,
    options: Sequence[Tuple[str, str]] = (),
    type: StepType = StepType.SINGLE,
    description: Optional[str] = None,
) -> QuizStep:
    return QuizStep(
        id=step_id,
        section=section,
        question=question,
        type=type,
        description=description,
        options=tuple(QuizOption(value, label) for value, label in options),
    )


_INTEREST_OPTIONS = (
    ("muy-interesado", "Muy interesado"),
    ("interesado", "Interesado"),
    ("poco-interesado", "Poco interesado"),
    ("no-interesado", "No me interesa"),
)


QUIZ_STEPS: Tuple[QuizStep, ...] = (
    # Contexto
    _step("main-goal", "Contexto", "¿Cuál es tu principal objetivo con la inteligencia artificial?", (
        ("dinero", "Generar ingresos adicionales o principales"),
        ("habilidades", "Aprender nuevas habilidades profesionales"),
        ("negocio", "Hacer crecer o automatizar mi negocio"),
        ("curiosidad", "Satisfacer mi curiosidad y explorar posibilidades"),
    ), description="Elige la opción que mejor describa tu motivación principal"),
    _step("time-horizon", "Contexto", "¿Cuándo quieres empezar a ver resultados?", (
        ("inmediato", "Lo antes posible (esta semana)"),
        ("1-mes", "En el próximo mes"),
        ("3-meses", "En los próximos 3 meses"),
        ("6-meses", "En los próximos 6 meses"),
        ("sin-prisa", "No tengo prisa, quiero aprender bien"),
    )),
    _step("experience-level", "Contexto", "¿Cuál es tu nivel de experiencia con inteligencia artificial?", (
        ("ninguna", "Ninguna, nunca he usado IA"),
        ("basica", "Básica, he usado ChatGPT o herramientas similares"),
        ("intermedia", "Intermedia, uso varias herramientas de IA regularmente"),
        ("avanzada", "Avanzada, creo prompts complejos o integro IA en mi trabajo"),
    )),
    _step("income-type", "Contexto", "¿Qué tipo de ingresos buscas generar?", (
        ("ingresos-extra", "Ingresos extra mientras mantengo mi trabajo actual"),
        ("ingresos-principales", "Ingresos principales, quiero hacer esto mi trabajo"),
        ("ambos", "Empezar como extra y eventualmente hacerlo principal"),
        ("no-seguro", "Aún no estoy seguro, quiero explorar opciones"),
    )),
    _step("seriousness", "Contexto", "¿Qué tan serio estás sobre tomar acción y empezar?", (
        ("muy-serio", "Muy serio, estoy listo para empezar ahora"),
        ("serio", "Serio, pero necesito ver el plan primero"),
        ("explorando", "Estoy explorando opciones"),
        ("solo-curioso", "Solo tengo curiosidad por ahora"),
    )),
    _step("name", "Contexto", "¿Cómo te llamas?", type=StepType.TEXT,
          description="Queremos personalizar tu experiencia"),

    # Habilidades
    _step("technical-level", "Habilidades", "¿Cómo describirías tu nivel técnico general?", (
        ("principiante", "Principiante, necesito guía paso a paso"),
        ("basico", "Básico, me defiendo con tecnología común"),
        ("intermedio", "Intermedio, aprendo rápido nuevas herramientas"),
        ("avanzado", "Avanzado, me siento cómodo con tecnología compleja"),
    )),
    _step("tools-used", "Habilidades", "¿Qué herramientas de IA ya usas o has usado?", (
        ("chatgpt", "ChatGPT"),
        ("claude", "Claude"),
        ("midjourney", "Midjourney / DALL-E"),
        ("canva", "Canva (con IA)"),
        ("otras", "Otras herramientas de IA"),
        ("ninguna", "Ninguna, sería mi primera vez"),
    ), type=StepType.MULTIPLE, description="Puedes seleccionar todas las que apliquen"),
    _step("time-available", "Habilidades", "¿Cuántas horas por semana puedes dedicar a aprender y ejecutar?", (
        ("menos-2h", "Menos de 2 horas"),
        ("2-4h", "2-4 horas"),
        ("5-10h", "5-10 horas"),
        ("10-20h", "10-20 horas"),
        ("20h+", "Más de 20 horas"),
    )),
    _step("access-resources", "Habilidades", "¿Con qué recursos cuentas para trabajar?", (
        ("computadora", "Computadora o laptop"),
        ("smartphone", "Smartphone"),
        ("internet", "Internet estable"),
        ("presupuesto-herramientas", "Presupuesto para herramientas premium"),
    ), type=StepType.MULTIPLE, description="Selecciona todos los que tengas"),
    _step("learning-comfort", "Habilidades", "¿Qué tan cómodo te sientes aprendiendo paso a paso?", (
        ("muy-comodo", "Muy cómodo, prefiero instrucciones claras"),
        ("comodo", "Cómodo, pero también me gusta explorar"),
        ("poco-comodo", "Poco cómodo, prefiero más autonomía"),
        ("no-seguro", "No estoy seguro, depende del tema"),
    )),
    _step("past-attempts", "Habilidades", "¿Has intentado generar ingresos en línea antes?", (
        ("si-exitoso", "Sí, y he tenido éxito"),
        ("si-parcial", "Sí, con resultados parciales"),
        ("si-sin-resultados", "Sí, pero sin resultados"),
        ("no", "No, sería mi primera vez"),
    )),

    # Intereses
    _step("interest-services", "Intereses", "¿Te interesa ofrecer servicios de IA a negocios locales?",
          _INTEREST_OPTIONS,
          description="Por ejemplo: automatizar marketing, crear contenido, optimizar procesos"),
    _step("interest-content", "Intereses", "¿Te interesa crear contenido usando IA?",
          _INTEREST_OPTIONS,
          description="Videos, posts, artículos, imágenes para redes sociales o tu marca"),
    _step("interest-products", "Intereses", "¿Te interesa crear y vender productos digitales con IA?",
          _INTEREST_OPTIONS,
          description="Ebooks, cursos, plantillas, herramientas digitales"),
    _step("interest-freelance", "Intereses", "¿Te interesa trabajar como freelancer o consultor de IA?",
          _INTEREST_OPTIONS,
          description="Ofrecer servicios de escritura, SEO, automatización a clientes"),
    _step("interest-saas", "Intereses", "¿Te interesa crear herramientas o SaaS con IA?",
          _INTEREST_OPTIONS,
          description="Aplicaciones, software o plataformas que usen IA"),
    _step("preference-templates", "Intereses", "¿Qué prefieres para aprender?", (
        ("templates", "Plantillas listas para usar (done-for-you)"),
        ("guias", "Guías paso a paso detalladas"),
        ("comunidad", "Acceso a comunidad y soporte"),
        ("casos-estudio", "Casos de estudio y ejemplos reales"),
    ), type=StepType.MULTIPLE, description="Puedes seleccionar múltiples opciones"),
    _step("business-type", "Intereses", "¿Qué tipo de negocio prefieres construir?", (
        ("solo", "Solo, trabajo independiente"),
        ("clientes", "Con clientes, servicios o consultoría"),
        ("automatizado", "Automatizado y escalable"),
        ("no-seguro", "Aún no estoy seguro"),
    )),

    # Barreras
    _step("biggest-fear", "Barreras", "¿Cuál es tu mayor miedo o preocupación al empezar?", (
        ("tiempo", "No tener suficiente tiempo"),
        ("dinero", "Invertir dinero sin resultados"),
        ("tecnologia", "No entender la tecnología"),
        ("fracaso", "Fracasar o no tener éxito"),
        ("competencia", "Hay mucha competencia"),
        ("ninguno", "No tengo miedos específicos"),
    )),
    _step("what-stopped", "Barreras", "Si has intentado esto antes, ¿qué te detuvo?", (
        ("no-empece", "Nunca empecé realmente"),
        ("falta-tiempo", "Falta de tiempo"),
        ("falta-dinero", "Falta de dinero o recursos"),
        ("falta-conocimiento", "Falta de conocimiento o guía"),
        ("desmotivacion", "Me desmotivé o perdí el enfoque"),
        ("no-intente", "Nunca lo he intentado"),
    )),
    _step("learning-style", "Barreras", "¿Cómo prefieres aprender?", (
        ("video", "Videos y tutoriales"),
        ("texto", "Texto y guías escritas"),
        ("interactivo", "Contenido interactivo"),
        ("combinado", "Combinación de formatos"),
        ("en-vivo", "Sesiones en vivo o mentoría"),
    )),
    _step("success-change", "Barreras", "Si tuvieras éxito con esto, ¿qué cambiaría en tu vida?", (
        ("libertad-financiera", "Libertad financiera e independencia"),
        ("mas-tiempo", "Más tiempo para mi familia o pasatiempos"),
        ("trabajo-mejor", "Un trabajo mejor o cambiar de carrera"),
        ("crecer-negocio", "Hacer crecer mi negocio actual"),
        ("aprender", "Aprender algo nuevo y desafiante"),
    ), description="Elige la opción más importante para ti"),
    _step("accountability", "Barreras", "¿Qué nivel de apoyo y responsabilidad necesitas?", (
        ("mucho", "Mucho, quiero comunidad y seguimiento"),
        ("moderado", "Moderado, algunos recursos y comunidad"),
        ("poco", "Poco, prefiero trabajar solo"),
        ("no-seguro", "No estoy seguro"),
    )),

    # Compromiso
    _step("income-dream", "Compromiso", "¿Qué te emociona más sobre ganar dinero con IA?", type=StepType.TEXT,
          description="Escribe lo que más te motiva e ilusiona sobre las posibilidades con inteligencia artificial"),
    _step("success-visualization", "Compromiso", "Cuando tengas éxito con IA, ¿qué cambiarás primero en tu vida?",
          type=StepType.TEXT,
          description="Visualiza y escribe cómo transformarías tu vida con ingresos adicionales o principales"),
    _step("readiness", "Compromiso", "¿Qué tan listo estás para empezar?", (
        ("ahora", "Ahora mismo, estoy listo"),
        ("esta-semana", "Esta semana"),
        ("este-mes", "Este mes"),
        ("mas-adelante", "Más adelante, solo estoy explorando"),
    )),
    _step("decision-reinforcement", "Compromiso",
          "Si existiera un plan claro paso a paso para lograr tus objetivos, ¿lo seguirías?", (
              ("definitivamente", "Definitivamente sí"),
              ("probablemente", "Probablemente sí"),
              ("tal-vez", "Tal vez, necesito ver más detalles"),
              ("no-seguro", "No estoy seguro"),
          )),
    _step("email", "Compromiso", "¿Cuál es tu email?", type=StepType.TEXT,
          description="Te enviaremos tu plan personalizado aquí"),
)
